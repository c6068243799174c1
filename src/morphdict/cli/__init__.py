"""
Command-line interface entry points for morphdict.

Entry points:
- mdcompile: Compile wordlists into dictionaries
- mdinspect: Show the header, metadata and entries of a dictionary
"""
