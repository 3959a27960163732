"""Guess processing helpers.

Every chat guess flows through the same validation pipeline so rejections
are consistent and show up the same way in logs and notices.
"""
