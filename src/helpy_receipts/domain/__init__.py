"""Pure text-processing helpers behind the receipt parser."""
