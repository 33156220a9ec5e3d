"""
relcov.commands - CLI command implementations
"""
