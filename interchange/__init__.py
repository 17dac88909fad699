import interchange.categories as categories
import interchange.transactions as transactions

_CODECS = {
    "categories": categories,
    "transactions": transactions,
}


def get_codec(collection: str):
    """Get the CSV codec module for a collection name."""
    if collection not in _CODECS:
        raise ValueError(f"Unknown collection: {collection}")
    return _CODECS[collection]


def get_available_codecs():
    """Get list of collections that can be exported and imported."""
    return list(_CODECS.keys())
