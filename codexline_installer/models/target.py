from dataclasses import dataclass


@dataclass(frozen=True)
class Target:
    """
    某个平台/架构对应的发布产物。

    asset_name 是发布页上的文件名，output_name 是安装到本地后的文件名。
    """

    asset_name: str
    output_name: str
