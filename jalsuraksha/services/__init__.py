"""
Services layered over the entity repositories.
"""
