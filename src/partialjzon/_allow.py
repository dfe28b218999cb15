"""Fragment-kind flags controlling which unfinished values a parse may return."""

from __future__ import annotations

from enum import Flag

# Alternate spellings accepted by Allow.from_names
_NAME_ALIASES = {
    "_INFINITY": "NEG_INFINITY",
    "-INFINITY": "NEG_INFINITY",
    "POSINF": "INFINITY",
    "NEGINF": "NEG_INFINITY",
}


class Allow(Flag):
    """
    Set of JSON fragment kinds that may be returned while still unfinished.

    When the input ends inside a value whose kind is in the mask, the parser
    returns a best-effort partial value. When the kind is missing, strings,
    numbers and containers raise IncompleteJSONError (wait for more text)
    while bare keywords raise MalformedJSONError.
    """

    NONE = 0

    STR = 1 << 0
    NUM = 1 << 1
    ARR = 1 << 2
    OBJ = 1 << 3
    NULL = 1 << 4
    BOOL = 1 << 5
    NAN = 1 << 6
    INFINITY = 1 << 7
    NEG_INFINITY = 1 << 8

    # Glossary spellings
    POS_INF = INFINITY
    NEG_INF = NEG_INFINITY

    INF = INFINITY | NEG_INFINITY
    SPECIAL = NULL | BOOL | NAN | INF
    ATOM = STR | NUM | SPECIAL
    COLLECTION = ARR | OBJ
    ALL = ATOM | COLLECTION

    def __sub__(self, other: Allow) -> Allow:
        if not isinstance(other, Allow):
            return NotImplemented
        return self & ~other

    @classmethod
    def from_names(cls, *names: str) -> Allow:
        """
        Builds a mask from case-insensitive member names.

        Accepts individual kinds ("str", "num"), the convenience groups
        ("inf", "atom", "all") and the "_infinity" spelling of NEG_INFINITY.
        """
        mask = cls.NONE
        for name in names:
            key = name.strip().upper()
            member = cls.__members__.get(_NAME_ALIASES.get(key, key))
            if member is None:
                raise ValueError(f"Unknown fragment kind: {name!r}")
            mask |= member
        return mask
