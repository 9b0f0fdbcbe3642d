"""
Directory subsystem services.

- categories: push tenant taxonomies to the external category directory
- directory: materialize the public directory read-model
- promotions: promote listings and expire them on a sweep
"""
