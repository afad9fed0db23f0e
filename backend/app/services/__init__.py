"""
Services package for side-channel work triggered by the API.
"""
