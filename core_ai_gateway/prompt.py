import json
from typing import Any, Optional


def assemble(preamble: str, user_context: Optional[Any], message: str) -> str:
    """
    Build the single prompt sent to the model.

    The context block is present only when ``user_context`` is not None
    (an empty dict still counts as supplied). The context is serialized as
    indented JSON, never summarized, and the message is never truncated.
    """
    context_block = ""
    if user_context is not None:
        context_block = f"\nUser context:\n{json.dumps(user_context, indent=2, ensure_ascii=False)}\n"

    return f"{preamble}\n{context_block}\nUser question:\n{message}"
