"""ID generators for new Firestore documents."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_auto_id() -> str:
    """Generate a collision-resistant document id (CUID2).

    Used wherever the web SDK would call doc() / addDoc() without an id.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result
