from codexline_installer.models import ReleaseLocation, Target


CHECKSUM_FILE_NAME = "codexline-checksums.txt"


def binary_url(location: ReleaseLocation, target: Target) -> str:
    """二进制下载地址：<base>/<version>/<asset>"""
    return location.release_base + target.asset_name


def checksum_url(location: ReleaseLocation) -> str:
    """校验文件地址，所有平台共用同一个文件"""
    return location.release_base + CHECKSUM_FILE_NAME
