from bson import ObjectId


def serialize_doc(value):
    """Make a Mongo document JSON friendly: `_id` becomes `id`, ObjectIds become strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [serialize_doc(item) for item in value]
    if isinstance(value, dict):
        doc = {}
        for key, item in value.items():
            doc["id" if key == "_id" else key] = serialize_doc(item)
        return doc
    return value
