"""Sample application used by the importer, API and CLI tests."""


class Application:
    """Lives in the root package, so it belongs to no module."""
