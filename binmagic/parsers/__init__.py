"""
binmagic Parsers
=================

ELF decoding components, leaves first: byte cursor, layout tables,
identity probe, header, section/program header tables, string tables,
symbol tables and the dynamic section.  ``elf_parser`` ties them together.
"""
