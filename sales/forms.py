# sales/forms.py

from django import forms
from .models import Sale, SaleItem


class SaleAdminForm(forms.ModelForm):
    """
    Admin form for a sale. Status and totals are driven by the sale
    services, so only the customer and date are editable here.
    """

    class Meta:
        model = Sale
        fields = ['owner', 'customer', 'date']
        widgets = {
            'date': forms.DateTimeInput(attrs={'type': 'datetime-local'}),
        }

    def clean(self):
        cleaned = super().clean()
        owner = cleaned.get('owner')
        customer = cleaned.get('customer')
        if owner and customer and customer.owner_id != owner.pk:
            raise forms.ValidationError("The customer belongs to another seller.")
        return cleaned


class SaleItemInlineForm(forms.ModelForm):
    """
    Inline form for sale lines: exactly one of app or combo, and the
    price defaults to the current price of what is sold.
    """

    class Meta:
        model = SaleItem
        fields = ['app', 'combo', 'quantity', 'price']
        widgets = {
            'quantity': forms.NumberInput(attrs={'min': 1}),
            'price': forms.NumberInput(attrs={'step': '0.01', 'min': 0}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['price'].required = False

    def clean(self):
        cleaned = super().clean()
        app = cleaned.get('app')
        combo = cleaned.get('combo')

        if bool(app) == bool(combo):
            raise forms.ValidationError("Choose either an app or a combo.")

        if cleaned.get('price') in (None, ''):
            cleaned['price'] = (app or combo).price

        return cleaned
