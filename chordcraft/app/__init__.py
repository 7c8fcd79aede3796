"""
App Subpackage

    - api.py: the public operations, addressed by instrument id
    - cli.py: the `chordcraft` command-line interface
"""
