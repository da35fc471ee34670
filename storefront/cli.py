"""Flask CLI commands: sample data and guest cart housekeeping."""

import click
from flask import Flask
from flask.cli import AppGroup, with_appcontext

from .extensions import db
from .models import Category, Product, ProductCategory, ProductImage
from .services.cart import expire_guest_carts
from .utils.helpers import to_money

CATEGORIES = [
    {'name': 'Smartphones', 'description': 'Phones and accessories', 'display_order': 1},
    {'name': 'Laptops', 'description': 'Notebooks and ultrabooks', 'display_order': 2},
    {'name': 'Audio', 'description': 'Headphones, earbuds and speakers', 'display_order': 3},
    {'name': 'Televisions', 'description': 'Smart TVs and displays', 'display_order': 4},
    {'name': 'Accessories', 'description': 'Chargers, cables and cases', 'display_order': 5},
]

PRODUCTS = [
    {'name': 'Galaxy A54 5G', 'brand': 'Samsung', 'model': 'SM-A546E', 'sku': 'SAM-A54-128',
     'regular_price': 52999, 'sale_price': 48999, 'cost': 41000, 'stock_quantity': 25,
     'featured': True, 'categories': ['Smartphones'],
     'description': '6.4" Super AMOLED display, 128GB storage, 50MP camera'},
    {'name': 'Redmi Note 13', 'brand': 'Xiaomi', 'model': '23124RA7EO', 'sku': 'XIA-RN13-256',
     'regular_price': 27999, 'cost': 21500, 'stock_quantity': 40,
     'categories': ['Smartphones'],
     'description': '6.67" AMOLED, 256GB storage, 5000mAh battery'},
    {'name': 'IdeaPad Slim 3', 'brand': 'Lenovo', 'model': '15IAH8', 'sku': 'LEN-IPS3-512',
     'regular_price': 74999, 'sale_price': 69999, 'cost': 60000, 'stock_quantity': 8,
     'featured': True, 'categories': ['Laptops'],
     'description': 'Intel Core i5, 16GB RAM, 512GB SSD'},
    {'name': 'MacBook Air M2', 'brand': 'Apple', 'model': 'MLY33', 'sku': 'APL-MBA-M2',
     'regular_price': 164999, 'cost': 140000, 'stock_quantity': 4,
     'categories': ['Laptops'],
     'description': '13.6" Liquid Retina display, 8GB unified memory, 256GB SSD'},
    {'name': 'WH-1000XM5', 'brand': 'Sony', 'model': 'WH1000XM5/B', 'sku': 'SNY-WH1000XM5',
     'regular_price': 49999, 'sale_price': 44999, 'cost': 36000, 'stock_quantity': 12,
     'featured': True, 'categories': ['Audio', 'Accessories'],
     'description': 'Wireless noise cancelling headphones'},
    {'name': 'Flip 6', 'brand': 'JBL', 'model': 'JBLFLIP6BLK', 'sku': 'JBL-FLIP6',
     'regular_price': 15999, 'cost': 11500, 'stock_quantity': 30,
     'categories': ['Audio'],
     'description': 'Portable waterproof bluetooth speaker'},
    {'name': '55" Crystal UHD TV', 'brand': 'Samsung', 'model': 'UA55CU7000', 'sku': 'SAM-TV55-CU7',
     'regular_price': 69999, 'cost': 55000, 'stock_quantity': 6,
     'categories': ['Televisions'],
     'description': '4K UHD smart TV with HDR'},
    {'name': '25W USB-C Charger', 'brand': 'Samsung', 'model': 'EP-TA800', 'sku': 'SAM-CHG-25W',
     'regular_price': 2499, 'cost': 1400, 'stock_quantity': 100, 'max_order_quantity': 10,
     'categories': ['Accessories'],
     'description': 'Super fast charging travel adapter'},
]


def seed_database():
    """Insert sample categories and products that do not exist yet."""
    created_categories = created_products = 0

    categories = {}
    for data in CATEGORIES:
        category = Category.query.filter_by(name=data['name']).first()
        if category is None:
            category = Category(**data)
            category.generate_slug()
            db.session.add(category)
            db.session.flush()
            created_categories += 1
        categories[category.name] = category

    for data in PRODUCTS:
        if Product.query.filter_by(sku=data['sku']).first():
            continue
        data = dict(data)
        category_names = data.pop('categories')
        for field in ('regular_price', 'sale_price', 'cost'):
            if field in data:
                data[field] = to_money(data[field])

        product = Product(**data)
        product.generate_slug()
        for index, name in enumerate(category_names):
            product.category_links.append(
                ProductCategory(category=categories[name], is_primary=index == 0)
            )
        product.images.append(ProductImage(
            image_url=f"/static/products/{product.slug}.jpg",
            alt_text=product.name,
            is_primary=True
        ))
        db.session.add(product)
        db.session.flush()
        created_products += 1

    db.session.commit()
    return created_categories, created_products


carts_cli = AppGroup('carts', help='Cart maintenance.')


@carts_cli.command('expire')
def expire_carts_command():
    """Abandon guest carts past their expiry time."""
    count = expire_guest_carts()
    click.echo(f'Abandoned {count} expired guest cart(s).')


@click.command('seed')
@with_appcontext
def seed_command():
    """Seed the database with sample catalog data."""
    db.create_all()
    categories, products = seed_database()
    if not categories and not products:
        click.echo('Database already seeded!')
        return
    click.echo(f'Created {categories} categories and {products} products.')


def register_commands(app: Flask):
    app.cli.add_command(seed_command)
    app.cli.add_command(carts_cli)
