from __future__ import annotations

import typing as t

import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid


class PrefixedKey(str):
    """A shortuuid tagged with a four-letter type prefix, e.g. `sess$mhvXdrZT4jP5T8vBxuvm75`.

    Calling the class with no argument mints a fresh key; calling it with a
    string validates the prefix and the key part.
    """

    prefix: t.ClassVar[str]
    Separator: t.ClassVar[str] = "$"
    KeyLength: t.ClassVar[int] = 22

    def __init_subclass__(cls, prefix: str, **kwargs: t.Any):
        super().__init_subclass__(**kwargs)
        if len(prefix) != 4 or cls.Separator in prefix:
            raise TypeError(f"{cls.__name__}: prefix must be four characters without {cls.Separator!r}")
        cls.prefix = prefix

    def __new__(cls, value: str | None = None, /) -> t.Self:
        if value is None:
            return super().__new__(cls, f"{cls.prefix}{cls.Separator}{shortuuid.uuid()}")

        head, sep, key = value.partition(cls.Separator)
        if head != cls.prefix or not sep:
            raise ValueError(f"invalid {cls.__name__}: must begin with {cls.prefix}{cls.Separator}")
        alphabet = shortuuid.get_alphabet()
        if len(key) != cls.KeyLength or any(c not in alphabet for c in key):
            raise ValueError(f"invalid {cls.__name__}: key must be {cls.KeyLength} characters of {alphabet}")
        return super().__new__(cls, value)

    @property
    def key(self) -> str:
        return self.partition(self.Separator)[2]

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"


class SessionID(PrefixedKey, prefix="sess"): ...
