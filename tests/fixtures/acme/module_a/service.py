from .internal.repository import InternalRepositoryA


class ServiceA:
    def __init__(self, repository: InternalRepositoryA) -> None:
        self.repository = repository

    def find(self, key: str) -> str:
        return self.repository.load(key)
