from .app import create_app, event_stream
