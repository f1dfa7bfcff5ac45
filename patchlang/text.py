"""Small helpers for building text buffers."""


def unlines(*lines: str) -> bytes:
    """Join the lines with a newline after each one, including the last."""
    return "".join(f"{line}\n" for line in lines).encode("utf-8")