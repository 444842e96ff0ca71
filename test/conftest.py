def pytest_configure(config):
	config.addinivalue_line("markers", "slow: compiles and runs generated C code")
