"""Interactive prompts."""


def confirm(question: str, default: bool = False) -> bool:
    """Ask a yes/no question on the terminal.

    Args:
        question: Text shown before the ``[y/N]`` hint
        default: Answer used for an empty reply or end of input

    Returns:
        True if the user answered yes
    """
    hint = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {hint} ").strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in ("y", "yes")
