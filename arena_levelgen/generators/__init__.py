"""
Generation stages: room layout, archetype planning and height fields.
"""
