"""
로깅 설정

콘솔 포매터(노드 초기화 로그는 박스 표시)와 비밀값 마스킹 필터
"""
import logging
import re
import sys
from typing import Optional


# sk-..., sk-ant-..., Bearer 토큰 형태의 문자열
_SECRET_PATTERN = re.compile(r"(sk-(?:ant-)?[A-Za-z0-9_\-]{4})[A-Za-z0-9_\-]{8,}")
_BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+")

# 레벨별 (ANSI 색상, 아이콘)
LEVEL_STYLES = {
    "DEBUG": ("\033[36m", "🔍"),
    "INFO": ("\033[32m", "ℹ️"),
    "WARNING": ("\033[33m", "⚠️"),
    "ERROR": ("\033[31m", "❌"),
    "CRITICAL": ("\033[35m", "🚨"),
}
_RESET = "\033[0m"

# DEBUG/INFO가 과도한 외부 라이브러리 로거
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "openai", "asyncio", "uvicorn", "uvicorn.access")


def mask_secret(value: Optional[str]) -> str:
    """
    비밀값을 로그에 남길 수 있는 형태로 마스킹

    Args:
        value: 원본 비밀값

    Returns:
        앞 4자리만 남긴 문자열 (예: "sk-a...****")
    """
    if not value:
        return "<empty>"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{'*' * 4}"


class SecretMaskingFilter(logging.Filter):
    """
    로그 레코드에서 API 키 형태의 문자열을 마스킹하는 필터
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _SECRET_PATTERN.sub(r"\1****", message)
        masked = _BEARER_PATTERN.sub(r"\1****", masked)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class ConsoleFormatter(logging.Formatter):
    """
    한 줄 콘솔 포매터

    노드 컨텍스트(node_name, flow_execution_id)가 있으면 줄 끝에 덧붙입니다.
    """

    def __init__(self, use_colors: bool = True, use_icons: bool = False):
        super().__init__()
        self.use_colors = use_colors and sys.stdout.isatty()
        self.use_icons = use_icons

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        source = record.name.replace("flownodes.", "")
        color, icon = LEVEL_STYLES.get(record.levelname, ("", "📝"))

        level = f"{record.levelname:8s}"
        if self.use_colors:
            level = f"{color}{level}{_RESET}"
        if self.use_icons:
            level = f"{icon} {level}"

        line = f"{timestamp} | {level} | {source:30s} | {record.getMessage()}"

        node_name = getattr(record, "node_name", None)
        if node_name:
            line += f" [node={node_name} exec={getattr(record, 'flow_execution_id', '-')}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredFormatter(ConsoleFormatter):
    """
    구조화된 로그 포매터

    log_type == "node_init" 레코드는 박스형 블록으로 표시
    """

    WIDTH = 80

    def __init__(self):
        super().__init__(use_colors=False, use_icons=True)

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "log_type", None) != "node_init":
            return super().format(record)

        rows = (
            ("Node", getattr(record, "node_name", "N/A")),
            ("Node ID", getattr(record, "node_id", "N/A")),
            ("Execution", getattr(record, "flow_execution_id", "N/A")),
            ("Timestamp", self.formatTime(record, "%Y-%m-%d %H:%M:%S")),
            ("Message", record.getMessage()),
        )
        border = "═" * self.WIDTH
        body = [f"║ {label:<10} : {value}" for label, value in rows]
        return "\n".join(["", f"╔{border}╗", "║ 🧩 NODE INIT", f"╠{border}╣", *body, f"╚{border}╝"])


def setup_logging(log_level: str = "INFO", use_structured: bool = True):
    """
    루트 로거 초기화

    Args:
        log_level: 로그 레벨 이름 (대소문자 무관)
        use_structured: 노드 초기화 로그를 박스로 표시하는 포매터 사용 여부
    """
    level = getattr(logging, log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if use_structured else ConsoleFormatter())
    handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """모듈 로거 (보통 __name__ 사용)"""
    return logging.getLogger(name)
