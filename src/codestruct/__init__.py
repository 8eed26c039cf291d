"""CodeStruct: AI-assisted codebase analysis, documentation and refactoring."""

__version__ = "0.1.0"
