from pydantic import BaseModel


class InvoiceSettings(BaseModel):
    # Transactions are searched from invoice creation to due date + this many days
    payment_window_days: int = 30
