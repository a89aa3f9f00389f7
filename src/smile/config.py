"""Parser configuration: the binary operator precedence table."""

from pydantic import BaseModel, ConfigDict, field_validator

from .ast import Op

BINARY_OPERATORS = frozenset(op.value for op in Op)


class ParserConfig(BaseModel):
    """Immutable parser settings.

    ``levels`` lists the binary operator levels from loosest to tightest
    binding; each entry is a string of single-character operators. Every
    level is left-associative.
    """

    model_config = ConfigDict(frozen=True)

    levels: tuple[str, ...] = ("+-", "*/", "^")

    @field_validator("levels")
    @classmethod
    def _check_levels(cls, levels: tuple[str, ...]) -> tuple[str, ...]:
        if not levels:
            raise ValueError("at least one operator level is required")
        seen: set[str] = set()
        for level in levels:
            if not level:
                raise ValueError("operator levels must not be empty")
            for op in level:
                if op not in BINARY_OPERATORS:
                    raise ValueError(f"unknown binary operator {op!r}")
                if op in seen:
                    raise ValueError(f"operator {op!r} appears in more than one level")
                seen.add(op)
        return levels


DEFAULT_CONFIG = ParserConfig()
