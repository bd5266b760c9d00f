def snake_case(name: str) -> str:
    """Convert ``FooBarBaz`` to ``foo_bar_baz``.

    Only ASCII uppercase letters start a new word; the first character never
    gets a leading underscore.
    """
    result: list[str] = []
    for ch in name:
        if "A" <= ch <= "Z":
            if result:
                result.append("_")
            result.append(ch.lower())
        else:
            result.append(ch)
    return "".join(result)


def camel_case(name: str) -> str:
    """Convert ``foo_bar`` to ``fooBar``, lowercasing a leading capital."""
    if not name:
        return ""
    result: list[str] = []
    rest = name
    if "A" <= name[0] <= "Z":
        result.append(name[0].lower())
        rest = name[1:]
    next_capital = False
    for ch in rest:
        if ch == "_":
            next_capital = True
        elif next_capital and "a" <= ch <= "z":
            result.append(ch.upper())
            next_capital = False
        else:
            result.append(ch)
            next_capital = False
    return "".join(result)
