__display_name__ = "MyModule C"
