"""
Quoting and validation core for the fiat-to-crypto purchase form.
"""
