"""
EDGAR NC Parser - Test Suite

Test modules organized by functionality:
- unit/parsing/ - Tokenizer, grammar, tree builder, mapper, content, dates, models
- unit/test_config.py - YAML defaults and environment overrides
"""
