"""Staff dashboard routes."""

from flask import Blueprint, jsonify

from storefront.services import cart as cart_service
from storefront.services import orders as order_service
from storefront.utils.decorators import admin_required, capability_required

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/sales', methods=['GET'])
@capability_required('dashboard:sales')
def sales():
    """Sales metrics."""
    return jsonify(order_service.sales_summary())


@dashboard_bp.route('/inventory', methods=['GET'])
@capability_required('catalog:read_stock')
def inventory():
    """Stock levels for technicians and admins."""
    return jsonify(order_service.inventory_summary())


@dashboard_bp.route('/admin', methods=['GET'])
@admin_required
def admin_overview():
    """Admin dashboard with sales, inventory and cart statistics."""
    return jsonify({
        'sales': order_service.sales_summary(),
        'inventory': order_service.inventory_summary(),
        'carts': cart_service.cart_status_counts(),
    })
