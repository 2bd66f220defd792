"""File-based notice sink."""

import fcntl
from pathlib import Path
from typing import Any, Union

import orjson

from .base import BaseNoticeSink, NoticeSinkError
from .models import OperatorNotice


class FileNoticeSink(BaseNoticeSink):
    """Appends notices to a file as a JSON array or JSON lines."""

    def __init__(
        self,
        output_path: Union[str, Path],
        name: str = "file",
        format: str = "jsonl",
        create_dirs: bool = True,
    ):
        super().__init__(name)
        self.output_path = Path(output_path)
        self.format = format

        if format not in ("json", "jsonl"):
            raise NoticeSinkError(f"Unsupported format: {format}")

        if create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, notice: OperatorNotice) -> None:
        record = notice.to_dict()
        try:
            if self.format == "json":
                self._write_json_format(record)
            else:
                self._write_jsonl_format(record)
        except OSError as e:
            raise NoticeSinkError(f"File system error: {e}") from e

    def read_all(self) -> list[dict[str, Any]]:
        """Every notice currently in the file."""
        if not self.output_path.exists():
            return []
        content = self.output_path.read_bytes()
        if self.format == "json":
            return self._load_array(content)
        return [orjson.loads(line) for line in content.splitlines() if line.strip()]

    def _write_json_format(self, record: dict[str, Any]) -> None:
        existing = []
        if self.output_path.exists():
            existing = self._load_array(self.output_path.read_bytes())

        with open(self.output_path, "wb") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(orjson.dumps(existing + [record], option=orjson.OPT_INDENT_2))

    def _write_jsonl_format(self, record: dict[str, Any]) -> None:
        with open(self.output_path, "ab") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(orjson.dumps(record))
            f.write(b"\n")

    @staticmethod
    def _load_array(content: bytes) -> list[dict[str, Any]]:
        # Corrupted or empty files start fresh
        try:
            data = orjson.loads(content)
        except orjson.JSONDecodeError:
            return []
        return data if isinstance(data, list) else []
