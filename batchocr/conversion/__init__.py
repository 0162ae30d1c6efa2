"""Format conversion: input decoding and output rendering."""
