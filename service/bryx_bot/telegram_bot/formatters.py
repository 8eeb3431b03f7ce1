"""
Reply text for CRM listings and statistics.
"""

import html

from bryx_bot.schemas import ProductsResponse, SalesResponse, StatsResponse

TOP_CATEGORIES_LIMIT = 5
SHIPPED_MARKER = "✅ <b>Статус: Отправлено</b>"


def format_money(amount: float) -> str:
    return f"{amount:,.2f} грн"


def format_products(data: ProductsResponse) -> str:
    if not data.products:
        return "📦 Товары не найдены"

    shown = len(data.products)
    lines = [f"📦 Товары (первые {shown} из {data.total}):", ""]

    for product in data.products:
        favorite = "⭐ " if product.is_favorite else ""
        defective = "⚠️ " if product.is_defective else ""
        lines.append(f"{favorite}{defective}{product.name}")
        lines.append(f"  └ Категория: {product.category}")
        lines.append(f"  └ Цена: {format_money(product.sale_price)}")
        lines.append(f"  └ Статус: {product.status}")
        lines.append("")

    if data.total > shown:
        lines.append(f"Показано {shown} из {data.total} товаров")

    return "\n".join(lines).rstrip()


def format_sales(data: SalesResponse) -> str:
    if not data.sales:
        return "💰 Продажи не найдены"

    shown = len(data.sales)
    lines = [f"💰 Продажи (последние {shown} из {data.total}):", ""]

    for sale in data.sales:
        lines.append(f"#{sale.id} - {sale.buyer}")
        lines.append(f"  └ Дата: {sale.sale_date:%d.%m.%Y}")
        lines.append(f"  └ Сумма: {format_money(sale.total_amount)}")
        lines.append(f"  └ Товаров: {sale.product_count} шт.")
        lines.append(f"  └ Статус: {sale.status}")
        lines.append("")

    if data.total > shown:
        lines.append(f"Показано {shown} из {data.total} продаж")

    return "\n".join(lines).rstrip()


def format_stats(data: StatsResponse) -> str:
    products = data.products
    sales = data.sales

    lines = [
        "📊 Статистика Bryx CRM",
        "",
        "📦 Товары:",
        f"  └ Всего: {products.total}",
        f"  └ В наличии: {products.in_stock}",
        f"  └ Продано: {products.sold}",
        f"  └ Ожидается: {products.expected}",
        "",
        "💰 Продажи:",
        f"  └ Всего продаж: {sales.total}",
        f"  └ Общая сумма: {format_money(sales.total_amount)}",
        f"  └ Сегодня продаж: {sales.today.count}",
        f"  └ Сумма сегодня: {format_money(sales.today.amount)}",
    ]

    # Categories arrive already ranked by the CRM
    if data.categories:
        lines.append("")
        lines.append("📋 Топ категорий:")
        for category in data.categories[:TOP_CATEGORIES_LIMIT]:
            lines.append(f"  └ {category.category}: {category.count} шт.")

    return "\n".join(lines)


def mark_shipped(original_text: str | None) -> str:
    """Original message (escaped for HTML mode) plus the shipped status line."""
    return f"{html.escape(original_text or '')}\n\n{SHIPPED_MARKER}"
