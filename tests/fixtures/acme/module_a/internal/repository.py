class InternalRepositoryA:
    def load(self, key: str) -> str:
        return key
