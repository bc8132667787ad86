__named_interface__ = "API"
