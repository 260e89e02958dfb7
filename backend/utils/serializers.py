from bson import ObjectId


def serialize_doc(doc: dict | None) -> dict | None:
    """ObjectIds become strings so a Mongo document can be returned as JSON."""
    if not doc:
        return doc

    return {
        k: str(v) if isinstance(v, ObjectId) else v
        for k, v in doc.items()
    }


def serialize_docs(docs):
    return [serialize_doc(d) for d in docs]
