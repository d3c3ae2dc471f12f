import datetime
import logging
import shutil
from pathlib import Path
from typing import Callable, TextIO
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import settings

LOGGER_NAME = "gateway_admin"

_LOGGING_CONFIGURED = False


def _resolve_tzinfo(timezone_name: str | None) -> datetime.tzinfo:
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except ZoneInfoNotFoundError:
            pass
    # Fallback to system local timezone
    return datetime.datetime.now().astimezone().tzinfo or datetime.timezone.utc


class LocalTimezoneFormatter(logging.Formatter):
    """
    Logging formatter that forces timestamps into a configured timezone.
    Defaults to the system local timezone when LOG_TIMEZONE is not set
    or when the provided timezone is invalid.
    """

    def __init__(self, *args, timezone_name: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._tzinfo = _resolve_tzinfo(timezone_name)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.datetime.fromtimestamp(record.created, tz=self._tzinfo)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(timespec="milliseconds")


def infer_log_component(record: logging.LogRecord) -> str:
    """
    Map a record back to the layer that emitted it.

    All modules share the `gateway_admin` logger, so the call site path is the
    only reliable hint.
    """
    name = record.name or ""
    if name.startswith("uvicorn.access"):
        return "access"
    if name.startswith("uvicorn"):
        return "server"

    path = (record.pathname or "").replace("\\", "/")
    if "/gateway_admin/api/" in path or "/gateway_admin/middleware/" in path:
        return "api"
    if "/gateway_admin/services/audit_service.py" in path:
        return "audit"
    if "/gateway_admin/repositories/" in path:
        return "store"
    if "/gateway_admin/db/" in path:
        return "db"
    return "app"


class DailyFolderFileHandler(logging.Handler):
    """
    Writes logs to: <log_dir>/<YYYY-MM-DD>/<filename>
    and keeps at most backup_days date folders.
    """

    def __init__(
        self,
        log_dir: Path,
        filename: str,
        backup_days: int = 7,
        encoding: str = "utf-8",
        timezone_name: str | None = None,
        now_fn: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        super().__init__()
        self.log_dir = log_dir
        self.filename = filename
        self.backup_days = backup_days
        self.encoding = encoding
        self.terminator = "\n"
        self._tzinfo = _resolve_tzinfo(timezone_name)
        # now_fn is mainly for tests.
        self._now_fn = now_fn
        self._current_date: datetime.date | None = None
        self._stream: TextIO | None = None
        self._ensure_stream()

    def _today(self) -> datetime.date:
        now = self._now_fn() if self._now_fn is not None else datetime.datetime.now(tz=self._tzinfo)
        if now.tzinfo is None:
            now = now.replace(tzinfo=self._tzinfo)
        return now.date()

    def _prune_old_dirs(self) -> None:
        if self.backup_days <= 0:
            return
        try:
            candidates = [p for p in self.log_dir.iterdir() if p.is_dir()]
        except OSError:
            return

        dated: list[tuple[datetime.date, Path]] = []
        for p in candidates:
            try:
                dated.append((datetime.date.fromisoformat(p.name), p))
            except ValueError:
                continue

        dated.sort(key=lambda item: item[0])
        for _, stale in dated[: max(0, len(dated) - self.backup_days)]:
            shutil.rmtree(stale, ignore_errors=True)

    def _ensure_stream(self) -> None:
        today = self._today()
        if self._current_date == today and self._stream:
            return

        self._current_date = today
        self._close_stream()

        file_path = self.log_dir / today.isoformat() / self.filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        self._stream = open(file_path, "a", encoding=self.encoding)
        self._prune_old_dirs()

    def _close_stream(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.close()
        except OSError:
            pass
        self._stream = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._ensure_stream()
            if self._stream is None:
                return
            self._stream.write(self.format(record) + self.terminator)
            self._stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self._close_stream()
        finally:
            super().close()


class EnsureComponentFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not hasattr(record, "component"):
            setattr(record, "component", infer_log_component(record))
        return True


def _resolve_log_dir(value: str | Path) -> Path:
    p = value if isinstance(value, Path) else Path(value)
    if p.is_absolute():
        return p
    return Path(__file__).resolve().parents[1] / p


def setup_logging() -> None:
    """
    Configure application logging.

    Application records go to <LOG_DIR>/<YYYY-MM-DD>/app.log, uvicorn access
    records to access.log in the same folder, and everything is echoed to the
    console through the root logger.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    log_dir = _resolve_log_dir(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    level_value = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    formatter = LocalTimezoneFormatter(
        "%(asctime)s [%(levelname)s] [%(component)s] %(name)s - %(message)s",
        timezone_name=settings.log_timezone,
    )

    app_file_handler = DailyFolderFileHandler(
        log_dir=log_dir,
        filename="app.log",
        backup_days=settings.log_backup_days,
        timezone_name=settings.log_timezone,
    )
    app_file_handler.setFormatter(formatter)
    app_file_handler.addFilter(EnsureComponentFilter())
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(level_value)
    app_logger.propagate = True  # console output comes from the root handler
    app_logger.addHandler(app_file_handler)

    access_file_handler = DailyFolderFileHandler(
        log_dir=log_dir,
        filename="access.log",
        backup_days=settings.log_backup_days,
        timezone_name=settings.log_timezone,
    )
    access_file_handler.setFormatter(formatter)
    access_file_handler.addFilter(EnsureComponentFilter())
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.setLevel(level_value)
    access_logger.addHandler(access_file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root_logger.handlers
    )
    if not has_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.addFilter(EnsureComponentFilter())
        root_logger.addHandler(console_handler)

    _LOGGING_CONFIGURED = True


logger = logging.getLogger(LOGGER_NAME)
