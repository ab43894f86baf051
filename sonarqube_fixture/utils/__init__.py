"""
Building blocks used by the SonarQube controller.
"""
