"""
Sales app: checkout, bills, invoices and refunds for the café till.
"""
