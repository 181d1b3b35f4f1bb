from django.core.files.storage import default_storage


def resolve_storage_url(name: str | None) -> str | None:
    """URL for a stored blob id; None when no blob is attached."""
    if not name:
        return None
    return default_storage.url(name)
