import uuid


def generate_uuid():
    return str(uuid.uuid4())


def iso(value):
    return value.isoformat() if value is not None else None
