from .jsonio import SerializationError, dumps, dumps_snapshot
