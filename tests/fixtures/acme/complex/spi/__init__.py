__named_interface__ = "SPI"
