raise RuntimeError("excluded test packages are never imported")
