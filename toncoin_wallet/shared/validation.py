"""Input validation utilities for memos and derivation paths."""

import re
from dataclasses import dataclass
from typing import Any


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


class MemoValidator:
    MAX_MEMO_BYTES = 657432

    @classmethod
    def validate(cls, memo: str) -> ValidationResult:
        if len(memo.encode("utf-8")) > cls.MAX_MEMO_BYTES:
            return ValidationResult(
                is_valid=False,
                error_message=f"Memo is too long. Maximum is {cls.MAX_MEMO_BYTES} bytes.",
            )
        return ValidationResult(is_valid=True, normalized_value=memo)


class DerivationPathValidator:
    PATTERN = re.compile(r"^m(/\d+')*$")

    @classmethod
    def validate(cls, path: str) -> ValidationResult:
        if not isinstance(path, str) or not cls.PATTERN.match(path):
            return ValidationResult(
                is_valid=False,
                error_message="Derivation path must contain hardened indexes only",
            )
        return ValidationResult(is_valid=True, normalized_value=path)
