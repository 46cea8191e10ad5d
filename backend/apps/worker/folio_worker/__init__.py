"""
Folio Worker.

arq worker running the translation pipeline.
"""
