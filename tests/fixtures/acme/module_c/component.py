from acme.module_b.service import ServiceB


class ComponentC:
    def create(self):
        return ServiceB
