from __future__ import annotations

from typing import Optional

from acme.module_a.service import ServiceA


class ServiceB:
    service_a: ServiceA

    class Settings:
        retries: int = 3

    def __init__(self, service_a: ServiceA) -> None:
        self.service_a = service_a

    def lookup(self) -> Optional[ServiceA]:
        return self.service_a
