"""
hybsearch CLI - Submit GenBank/FASTA files to a hybsearch server.

Streams pipeline progress from the server and optionally saves the output
of every stage to the local machine.
"""

__version__ = "0.1.0"
__author__ = "hybsearch Team"
