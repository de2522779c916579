import pytest
from loguru import logger


@pytest.fixture
def log_messages():
    """收集 loguru 输出的日志消息"""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def sleeps():
    """记录退避等待时长，不真正等待"""
    recorded: list[float] = []

    async def fake_sleep(delay: float) -> None:
        recorded.append(delay)

    fake_sleep.recorded = recorded
    return fake_sleep
