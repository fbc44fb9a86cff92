"""
Pool pump sizing: flow requirements, pump-curve matching and TDH estimation
for pools, water features and spas.
"""
