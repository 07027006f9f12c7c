from django import forms
from django.utils.translation import gettext_lazy as _

from .models import Ingredient, MenuItem, Order, Payment, Reservation, RestoSettings, Table


class LoginForm(forms.Form):
    username = forms.CharField(
        max_length=50,
        widget=forms.TextInput(attrs={
            'class': 'input', 'placeholder': _('Username'), 'autofocus': True,
        }),
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={
            'class': 'input', 'placeholder': _('Password'),
        }),
    )


class OrderLineForm(forms.Form):
    menu_item = forms.ModelChoiceField(
        queryset=MenuItem.objects.filter(is_available=True, available_quantity__gt=0),
        required=False,
        widget=forms.Select(attrs={'class': 'select'}),
    )
    quantity = forms.IntegerField(
        min_value=1, initial=1, required=False,
        widget=forms.NumberInput(attrs={'class': 'input', 'min': '1'}),
    )
    note = forms.CharField(
        max_length=255, required=False,
        widget=forms.TextInput(attrs={
            'class': 'input', 'placeholder': _('e.g. not spicy'),
        }),
    )

    def as_item(self):
        data = self.cleaned_data
        if not data.get('menu_item'):
            return None
        return (data['menu_item'].pk, data.get('quantity') or 1, data.get('note', ''))


OrderLineFormSet = forms.formset_factory(OrderLineForm, extra=5)


class OrderCreateForm(forms.Form):
    table = forms.ModelChoiceField(
        queryset=Table.objects.filter(is_active=True),
        widget=forms.Select(attrs={'class': 'select'}),
    )


class OrderStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=[
            (Order.Status.BEING_PREPARED, Order.Status.BEING_PREPARED.label),
            (Order.Status.DONE, Order.Status.DONE.label),
            (Order.Status.DELIVERED, Order.Status.DELIVERED.label),
        ],
        widget=forms.Select(attrs={'class': 'select'}),
    )


class PaymentForm(forms.Form):
    orders = forms.ModelMultipleChoiceField(
        queryset=Order.objects.filter(status=Order.Status.DELIVERED, is_paid=False).select_related('table'),
        widget=forms.CheckboxSelectMultiple(attrs={'class': 'checkbox'}),
    )
    amount_paid = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'step': '0.01', 'min': '0'}),
    )
    method = forms.ChoiceField(
        choices=Payment.Method.choices,
        initial=Payment.Method.CASH,
        widget=forms.Select(attrs={'class': 'select'}),
    )


class ReservationForm(forms.Form):
    table = forms.ModelChoiceField(
        queryset=Table.objects.filter(is_active=True, status=Table.Status.EMPTY),
        widget=forms.Select(attrs={'class': 'select'}),
    )
    reserved_for = forms.DateTimeField(
        widget=forms.DateTimeInput(attrs={'class': 'input', 'type': 'datetime-local'}),
    )
    customer_name = forms.CharField(
        max_length=100, required=False,
        widget=forms.TextInput(attrs={'class': 'input', 'placeholder': _('Customer name')}),
    )


class ReservationStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=Reservation.Status.choices,
        widget=forms.Select(attrs={'class': 'select'}),
    )


class StockForm(forms.Form):
    available_quantity = forms.IntegerField(
        min_value=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'min': '0'}),
    )
    is_available = forms.TypedChoiceField(
        choices=[
            ('', _('No change')),
            ('true', _('Available')),
            ('false', _('Unavailable')),
        ],
        coerce=lambda value: value == 'true',
        empty_value=None,
        required=False,
        widget=forms.Select(attrs={'class': 'select'}),
    )


class TableForm(forms.Form):
    number = forms.CharField(
        max_length=10,
        widget=forms.TextInput(attrs={'class': 'input', 'placeholder': _('Table number')}),
    )


class RestoSettingsForm(forms.ModelForm):
    class Meta:
        model = RestoSettings
        fields = ['release_table_on_close', 'low_stock_threshold', 'notify_clients']
        widgets = {
            'release_table_on_close': forms.CheckboxInput(attrs={'class': 'toggle'}),
            'low_stock_threshold': forms.NumberInput(attrs={'class': 'input', 'min': '0'}),
            'notify_clients': forms.CheckboxInput(attrs={'class': 'toggle'}),
        }


class MenuItemForm(forms.Form):
    name = forms.CharField(
        max_length=100,
        widget=forms.TextInput(attrs={'class': 'input', 'placeholder': _('Menu name')}),
    )
    category = forms.ChoiceField(
        choices=MenuItem.Category.choices,
        widget=forms.Select(attrs={'class': 'select'}),
    )
    price = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'step': '0.01', 'min': '0'}),
    )
    available_quantity = forms.IntegerField(
        min_value=0, initial=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'min': '0'}),
    )
    is_available = forms.BooleanField(
        required=False, initial=True,
        widget=forms.CheckboxInput(attrs={'class': 'toggle'}),
    )


class IngredientForm(forms.Form):
    name = forms.CharField(
        max_length=100,
        widget=forms.TextInput(attrs={'class': 'input', 'placeholder': _('Ingredient name')}),
    )
    quantity = forms.DecimalField(
        max_digits=12, decimal_places=3, min_value=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'step': '0.001', 'min': '0'}),
    )
    unit = forms.CharField(
        max_length=20, required=False,
        widget=forms.TextInput(attrs={'class': 'input', 'placeholder': _('e.g. kg')}),
    )


class RecipeLineForm(forms.Form):
    ingredient = forms.ModelChoiceField(
        queryset=Ingredient.objects.all(),
        widget=forms.Select(attrs={'class': 'select'}),
    )
    quantity_required = forms.DecimalField(
        max_digits=12, decimal_places=3, min_value=0,
        widget=forms.NumberInput(attrs={'class': 'input', 'step': '0.001', 'min': '0'}),
    )
