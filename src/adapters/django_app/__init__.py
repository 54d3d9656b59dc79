"""
Adapters Django: persistência de snapshots e publicação de eventos.
"""
