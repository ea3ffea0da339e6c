"""
Registration domain: status workflow, tournament business rules,
registration services and the administrative importer.
"""
