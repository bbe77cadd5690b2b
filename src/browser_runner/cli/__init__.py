"""
Command line interfaces: browser-run and browser-detect.
"""
