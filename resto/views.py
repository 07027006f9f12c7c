"""
Resto Module Views

Tables, menu stock, orders, payments, reservations, activity log,
settings, JSON API and the realtime event stream.
"""

import json
import logging
from datetime import datetime

from django.db.models import Count, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from django.views.decorators.http import require_GET, require_POST

from . import realtime
from .decorators import login_required, permission_required
from .exceptions import RestoError
from .forms import (
    IngredientForm, LoginForm, MenuItemForm, OrderCreateForm, OrderLineForm,
    OrderLineFormSet, OrderStatusForm, PaymentForm, RecipeLineForm,
    ReservationForm, ReservationStatusForm, RestoSettingsForm, StockForm,
    TableForm,
)
from .htmx import htmx_view, with_module_nav
from .models import (
    ActivityLog, MenuItem, Order, Payment, Reservation, RestoSettings,
    StaffMember, Table,
)
from .services import (
    IngredientService, OrderService, PaymentService, ReservationService, StaffService,
    StockService, TableService,
)

logger = logging.getLogger(__name__)


def _staff(request):
    staff_id = request.session.get('staff_id')
    return StaffMember.objects.filter(id=staff_id).first() if staff_id else None


def _error(exc):
    logger.warning("%s: %s", type(exc).__name__, exc.message)
    return JsonResponse({'success': False, 'message': exc.message}, status=exc.status_code)


def _json_body(request):
    try:
        return json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return None


def _parse_date(value):
    if value:
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError:
            pass
    return timezone.localdate()


def _order_json(order):
    return {
        'id': order.pk,
        'table': order.table.number,
        'table_id': order.table_id,
        'staff': str(order.staff),
        'status': order.status,
        'status_display': order.get_status_display(),
        'is_paid': order.is_paid,
        'created_at': order.created_at.isoformat(),
        'total': str(order.total),
        'details': [{
            'id': detail.pk,
            'menu_id': detail.menu_item_id,
            'menu': detail.menu_item.name,
            'quantity': detail.quantity,
            'unit_price': str(detail.unit_price),
            'subtotal': str(detail.subtotal),
            'note': detail.note,
        } for detail in order.details.select_related('menu_item')],
    }


# =============================================================================
# Login
# =============================================================================

def login_view(request):
    if request.session.get('staff_id'):
        return redirect('resto:index')

    form = LoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        staff = StaffService.find_staff_by_credentials(
            form.cleaned_data['username'], form.cleaned_data['password'],
        )
        if staff:
            request.session.cycle_key()
            request.session['staff_id'] = staff.pk
            request.session['user_name'] = staff.username
            request.session['user_role'] = staff.role
            ActivityLog.record(ActivityLog.Action.LOGIN, staff.username, staff=staff, object_id=staff.pk)
            next_url = request.GET.get('next', '')
            if next_url.startswith('/') and not next_url.startswith('//'):
                return redirect(next_url)
            return redirect('resto:index')
        form.add_error(None, _('Invalid username or password'))

    return render(request, 'resto/pages/login.html', {'form': form})


@require_POST
def logout_view(request):
    request.session.flush()
    return redirect('resto:login')


# =============================================================================
# Tables (Index)
# =============================================================================

@login_required
@with_module_nav('tables')
@htmx_view('resto/pages/tables.html', 'resto/partials/tables.html')
def index(request):
    status_counts = {
        row['status']: row['count']
        for row in Table.objects.filter(is_active=True).order_by().values('status').annotate(count=Count('id'))
    }
    return {
        'tables': Table.objects.filter(is_active=True).order_by('number'),
        'status_choices': Table.Status.choices,
        'empty_count': status_counts.get(Table.Status.EMPTY, 0),
        'reserved_count': status_counts.get(Table.Status.RESERVED, 0),
        'occupied_count': status_counts.get(Table.Status.OCCUPIED, 0),
        'preparing_count': status_counts.get(Table.Status.BEING_PREPARED, 0),
    }


@login_required
@permission_required('resto.manage_settings')
@with_module_nav('tables')
@htmx_view('resto/pages/table_form.html', 'resto/partials/table_form.html')
def table_add(request):
    form = TableForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            TableService.create_table(form.cleaned_data['number'], staff=_staff(request))
        except RestoError as exc:
            form.add_error('number', exc.message)
        else:
            return redirect('resto:index')
    return {'form': form}


@login_required
@permission_required('resto.change_order')
@require_POST
def table_status(request, table_id):
    try:
        table = TableService.set_status(table_id, request.POST.get('status', ''), staff=_staff(request))
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'status': table.status})


# =============================================================================
# Menu & Stock
# =============================================================================

@login_required
@permission_required('resto.view_menu')
@with_module_nav('menu')
@htmx_view('resto/pages/menu.html', 'resto/partials/menu.html')
def menu_list(request):
    category = request.GET.get('category', '')
    items = MenuItem.objects.all()
    if category:
        items = items.filter(category=category)
    threshold = RestoSettings.get_settings().low_stock_threshold
    return {
        'items': items,
        'category_filter': category,
        'category_choices': MenuItem.Category.choices,
        'low_stock_threshold': threshold,
    }


@login_required
@permission_required('resto.change_stock')
@require_POST
def stock_update(request, menu_id):
    form = StockForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)
    try:
        menu = StockService.set_stock(
            menu_id,
            form.cleaned_data['available_quantity'],
            is_available=form.cleaned_data['is_available'],
            staff=_staff(request),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({
        'success': True,
        'available_quantity': menu.available_quantity,
        'is_available': menu.is_available,
    })


def _menu_form_response(request, menu=None):
    initial = None
    if menu is not None:
        initial = {
            'name': menu.name,
            'category': menu.category,
            'price': menu.price,
            'available_quantity': menu.available_quantity,
            'is_available': menu.is_available,
        }
    form = MenuItemForm(request.POST or None, initial=initial)
    if request.method == 'POST' and form.is_valid():
        try:
            saved = StockService.save_menu(
                menu_id=menu.pk if menu is not None else None,
                staff=_staff(request),
                **form.cleaned_data,
            )
        except RestoError as exc:
            form.add_error(None, exc.message)
        else:
            return redirect('resto:menu_edit', menu_id=saved.pk)

    context = {'form': form, 'menu': menu}
    if menu is not None:
        context['recipe'] = IngredientService.get_menu_ingredients(menu.pk)
        context['recipe_form'] = RecipeLineForm()
    return context


@login_required
@permission_required('resto.manage_menu')
@with_module_nav('menu')
@htmx_view('resto/pages/menu_form.html', 'resto/partials/menu_form.html')
def menu_add(request):
    return _menu_form_response(request)


@login_required
@permission_required('resto.manage_menu')
@with_module_nav('menu')
@htmx_view('resto/pages/menu_form.html', 'resto/partials/menu_form.html')
def menu_edit(request, menu_id):
    return _menu_form_response(request, get_object_or_404(MenuItem, pk=menu_id))


@login_required
@permission_required('resto.manage_menu')
@require_POST
def recipe_set(request, menu_id):
    form = RecipeLineForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)
    try:
        line = IngredientService.set_menu_ingredient(
            menu_id,
            form.cleaned_data['ingredient'].pk,
            form.cleaned_data['quantity_required'],
            staff=_staff(request),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({
        'success': True,
        'ingredient_id': line.ingredient_id,
        'quantity_required': str(line.quantity_required),
    })


@login_required
@permission_required('resto.manage_menu')
@require_POST
def recipe_remove(request, menu_id, ingredient_id):
    if not IngredientService.remove_menu_ingredient(menu_id, ingredient_id, staff=_staff(request)):
        return JsonResponse(
            {'success': False, 'message': str(_('Ingredient is not part of this recipe'))},
            status=404,
        )
    return JsonResponse({'success': True})


# =============================================================================
# Ingredients
# =============================================================================

@login_required
@permission_required('resto.view_menu')
@with_module_nav('ingredients')
@htmx_view('resto/pages/ingredients.html', 'resto/partials/ingredients.html')
def ingredients_list(request):
    return {
        'ingredients': IngredientService.get_all_ingredients(),
        'form': IngredientForm(),
    }


@login_required
@permission_required('resto.change_stock')
@with_module_nav('ingredients')
@htmx_view('resto/pages/ingredients.html', 'resto/partials/ingredients.html')
@require_POST
def ingredient_add(request):
    form = IngredientForm(request.POST)
    if form.is_valid():
        try:
            IngredientService.save_ingredient(
                form.cleaned_data['name'],
                form.cleaned_data['quantity'],
                form.cleaned_data['unit'],
                staff=_staff(request),
            )
        except RestoError as exc:
            form.add_error(None, exc.message)
        else:
            return redirect('resto:ingredients')
    return {
        'ingredients': IngredientService.get_all_ingredients(),
        'form': form,
    }


@login_required
@permission_required('resto.change_stock')
@require_POST
def ingredient_update(request, ingredient_id):
    form = IngredientForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)
    try:
        ingredient = IngredientService.save_ingredient(
            form.cleaned_data['name'],
            form.cleaned_data['quantity'],
            form.cleaned_data['unit'],
            ingredient_id=ingredient_id,
            staff=_staff(request),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({
        'success': True,
        'name': ingredient.name,
        'quantity': str(ingredient.quantity),
        'unit': ingredient.unit,
    })


# =============================================================================
# Orders
# =============================================================================

@login_required
@permission_required('resto.view_order')
@with_module_nav('orders')
@htmx_view('resto/pages/orders.html', 'resto/partials/orders.html')
def orders_list(request):
    status_filter = request.GET.get('status', '')
    orders = Order.objects.select_related('table', 'staff').prefetch_related('details')
    if status_filter:
        orders = orders.filter(status=status_filter)
    else:
        orders = orders.filter(status__in=Order.OPEN_STATUSES)
    return {
        'orders': orders.order_by('created_at'),
        'status_filter': status_filter,
        'status_choices': Order.Status.choices,
    }


@login_required
@permission_required('resto.view_order')
@with_module_nav('orders')
@htmx_view('resto/pages/order_detail.html', 'resto/partials/order_detail.html')
def order_detail(request, order_id):
    order = get_object_or_404(Order.objects.select_related('table', 'staff'), pk=order_id)
    return {
        'order': order,
        'details': order.details.select_related('menu_item'),
        'status_form': OrderStatusForm(),
        'item_form': OrderLineForm(),
        'payments': order.payments.all(),
    }


@login_required
@permission_required('resto.add_order')
@with_module_nav('orders')
@htmx_view('resto/pages/order_form.html', 'resto/partials/order_form.html')
def order_create(request):
    form = OrderCreateForm(request.POST or None, initial={'table': request.GET.get('table')})
    formset = OrderLineFormSet(request.POST or None, prefix='items')

    if request.method == 'POST' and form.is_valid() and formset.is_valid():
        items = [item for item in (line.as_item() for line in formset) if item]
        try:
            order = OrderService.create_order(form.cleaned_data['table'].pk, request.session['staff_id'], items)
        except RestoError as exc:
            form.add_error(None, exc.message)
        else:
            return redirect('resto:order_detail', order_id=order.pk)

    return {'form': form, 'formset': formset}


@login_required
@permission_required('resto.change_order')
@with_module_nav('orders')
@htmx_view('resto/pages/order_detail.html', 'resto/partials/order_detail.html')
def add_item(request, order_id):
    order = get_object_or_404(Order, pk=order_id)
    form = OrderLineForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        item = form.as_item()
        if item is None:
            form.add_error('menu_item', _('Choose a menu item'))
        else:
            menu_id, quantity, note = item
            try:
                OrderService.add_detail(order.pk, menu_id, quantity, note, staff=_staff(request))
            except RestoError as exc:
                form.add_error(None, exc.message)
            else:
                form = OrderLineForm()

    order.refresh_from_db()
    return {
        'order': order,
        'details': order.details.select_related('menu_item'),
        'status_form': OrderStatusForm(),
        'item_form': form,
        'payments': order.payments.all(),
    }


@login_required
@permission_required('resto.change_order')
@require_POST
def remove_item(request, detail_id):
    try:
        removed = OrderService.remove_detail(detail_id, staff=_staff(request))
    except RestoError as exc:
        return _error(exc)
    if not removed:
        return JsonResponse({'success': False, 'message': str(_('Item not found'))}, status=404)
    return JsonResponse({'success': True, 'message': str(_('Item removed'))})


@login_required
@permission_required('resto.cancel_order')
@require_POST
def cancel_order(request, order_id):
    if not OrderService.cancel_order(order_id, staff=_staff(request)):
        return JsonResponse({'success': False, 'message': str(_('Cannot cancel'))}, status=409)
    return JsonResponse({'success': True, 'status': Order.Status.CANCELLED})


@login_required
@permission_required('resto.change_status')
@require_POST
def update_status(request, order_id):
    try:
        order = OrderService.set_status(order_id, request.POST.get('status', ''), staff=_staff(request))
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'status': order.status})


# =============================================================================
# Payments
# =============================================================================

@login_required
@permission_required('resto.pay_order')
@with_module_nav('payments')
@htmx_view('resto/pages/payments.html', 'resto/partials/payments.html')
def payments_list(request):
    date = _parse_date(request.GET.get('date'))
    payments = PaymentService.get_payments_by_date(date)
    return {
        'payments': payments,
        'date': date,
        'total_received': sum((p.amount_paid for p in payments if p.is_successful), 0),
        'outstanding': Order.objects.filter(
            status=Order.Status.DELIVERED, is_paid=False,
        ).select_related('table'),
    }


@login_required
@permission_required('resto.pay_order')
@with_module_nav('payments')
@htmx_view('resto/pages/payment_form.html', 'resto/partials/payment_form.html')
def payment_create(request):
    initial = {}
    if request.GET.get('order'):
        initial['orders'] = [request.GET['order']]
    form = PaymentForm(request.POST or None, initial=initial)

    if request.method == 'POST' and form.is_valid():
        try:
            payments = PaymentService.pay(
                [order.pk for order in form.cleaned_data['orders']],
                request.session['staff_id'],
                form.cleaned_data['amount_paid'],
                form.cleaned_data['method'],
            )
        except RestoError as exc:
            form.add_error(None, exc.message)
        else:
            return {
                'payments': payments,
                'template': 'resto/partials/receipt.html',
            }

    return {'form': form}


@login_required
@permission_required('resto.pay_order')
@with_module_nav('payments')
@htmx_view('resto/pages/receipt.html', 'resto/partials/receipt.html')
def receipt(request, payment_id):
    payment = get_object_or_404(Payment.objects.select_related('order__table', 'staff'), pk=payment_id)
    return {'payments': [payment]}


@login_required
@permission_required('resto.pay_order')
@require_POST
def payment_failed(request, payment_id):
    try:
        payment = PaymentService.mark_failed(payment_id, staff=_staff(request))
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'is_successful': payment.is_successful})


# =============================================================================
# Reservations
# =============================================================================

@login_required
@permission_required('resto.view_reservation')
@with_module_nav('reservations')
@htmx_view('resto/pages/reservations.html', 'resto/partials/reservations.html')
def reservations_list(request):
    date = request.GET.get('date')
    if date:
        reservations = ReservationService.get_reservations_by_date(_parse_date(date))
    else:
        reservations = ReservationService.get_upcoming_reservations()
    return {
        'reservations': reservations,
        'date': date or '',
        'status_form': ReservationStatusForm(),
        'status_choices': Reservation.Status.choices,
    }


@login_required
@permission_required('resto.change_reservation')
@with_module_nav('reservations')
@htmx_view('resto/pages/reservation_form.html', 'resto/partials/reservation_form.html')
def reservation_create(request):
    form = ReservationForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            ReservationService.reserve(
                form.cleaned_data['table'].pk,
                request.session['staff_id'],
                form.cleaned_data['reserved_for'],
                form.cleaned_data['customer_name'],
            )
        except RestoError as exc:
            form.add_error(None, exc.message)
        else:
            return redirect('resto:reservations')
    return {'form': form}


@login_required
@permission_required('resto.change_reservation')
@require_POST
def reservation_status(request, reservation_id):
    try:
        reservation = ReservationService.change_status(
            reservation_id, request.POST.get('status', ''), staff=_staff(request),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'status': reservation.status})


# =============================================================================
# Activity Log
# =============================================================================

@login_required
@permission_required('resto.view_activity')
@with_module_nav('activity')
@htmx_view('resto/pages/activity.html', 'resto/partials/activity.html')
def activity(request):
    action = request.GET.get('action', '')
    entries = ActivityLog.objects.select_related('staff')
    if action:
        entries = entries.filter(action=action)
    return {
        'entries': entries[:200],
        'action_filter': action,
        'action_choices': ActivityLog.Action.choices,
    }


# =============================================================================
# Settings
# =============================================================================

@login_required
@permission_required('resto.manage_settings')
@with_module_nav('settings')
@htmx_view('resto/pages/settings.html', 'resto/partials/settings.html')
def settings_view(request):
    config = RestoSettings.get_settings()
    form = RestoSettingsForm(request.POST or None, instance=config)
    saved = False
    if request.method == 'POST' and form.is_valid():
        form.save()
        saved = True

    today = timezone.localdate()
    return {
        'form': form,
        'saved': saved,
        'today_orders_count': Order.objects.filter(created_at__date=today).count(),
        'today_revenue': Payment.objects.filter(
            receipt_number__startswith=f"{today:%Y%m%d}-", is_successful=True,
        ).aggregate(total=Sum('amount_paid'))['total'] or 0,
    }


# =============================================================================
# Realtime
# =============================================================================

@login_required
@require_GET
def events(request):
    return realtime.stream_response()


# =============================================================================
# API Endpoints (JSON)
# =============================================================================

@login_required
@permission_required('resto.add_order')
@require_POST
def api_create_order(request):
    """Create order with items via JSON API."""
    data = _json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': str(_('Invalid JSON'))}, status=400)

    try:
        order = OrderService.create_order(
            data.get('table_id'),
            request.session['staff_id'],
            data.get('items', []),
        )
    except RestoError as exc:
        return _error(exc)

    return JsonResponse({
        'success': True,
        'order_id': order.pk,
        'item_count': order.item_count,
        'total': str(order.total),
    })


@login_required
@permission_required('resto.view_order')
@require_GET
def api_get_order(request, order_id):
    try:
        order = OrderService.get_order(order_id)
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'order': _order_json(order)})


@login_required
@permission_required('resto.change_order')
@require_POST
def api_add_item(request, order_id):
    data = _json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': str(_('Invalid JSON'))}, status=400)
    try:
        detail = OrderService.add_detail(
            order_id,
            data.get('menu_id'),
            data.get('quantity', 1),
            data.get('note', ''),
            staff=_staff(request),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({'success': True, 'detail_id': detail.pk})


@login_required
@permission_required('resto.pay_order')
@require_POST
def api_pay(request):
    data = _json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': str(_('Invalid JSON'))}, status=400)
    try:
        payments = PaymentService.pay(
            data.get('order_ids', []),
            request.session['staff_id'],
            data.get('amount_paid'),
            data.get('method', Payment.Method.CASH),
        )
    except RestoError as exc:
        return _error(exc)
    return JsonResponse({
        'success': True,
        'payments': [{
            'id': payment.pk,
            'order_id': payment.order_id,
            'receipt_number': payment.receipt_number,
            'amount_paid': str(payment.amount_paid),
            'change_due': str(payment.change_due),
        } for payment in payments],
    })


@login_required
@require_GET
def api_menus(request):
    menus = StockService.get_orderable_menus()
    return JsonResponse({
        'success': True,
        'menus': [{
            'id': menu.pk,
            'name': menu.name,
            'category': menu.category,
            'price': str(menu.price),
            'available_quantity': menu.available_quantity,
        } for menu in menus],
    })


@login_required
@require_GET
def api_tables(request):
    status = request.GET.get('status')
    tables = Table.objects.filter(is_active=True)
    if status:
        tables = tables.filter(status=status)
    return JsonResponse({
        'success': True,
        'tables': [{
            'id': table.pk,
            'number': table.number,
            'status': table.status,
            'status_display': table.get_status_display(),
        } for table in tables],
    })


@login_required
@permission_required('resto.view_order')
@require_GET
def api_order_stats(request):
    return JsonResponse({
        'success': True,
        **OrderService.get_order_stats(_parse_date(request.GET.get('date'))),
    })
