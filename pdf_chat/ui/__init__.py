"""
Chat interface: client-local view state, backend client and NiceGUI pages.
"""
