"""
Persistência local dos snapshots das coleções do EntityStore.
"""
