"""Code execution service package.

This package runs short snippets of source code in one of several
languages and returns their captured output.  It backs the CodeLab
browser editor and runs as a small FastAPI service.

The top‑level modules include:

* ``config`` – configuration handling for environment variables.
* ``models`` – Pydantic models defining request and response schemas.
* ``executor`` – language registry, artifact handling and the execution core.
* ``api`` – FastAPI application exposing HTTP endpoints.

The ``api`` subpackage loads its configuration on import, so it is not
imported here; library users only need :mod:`codelab.executor`.
"""
