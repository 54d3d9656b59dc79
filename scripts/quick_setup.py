#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Cria banco de dados SQLite
3. Executa migrations
4. Cria dados de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import os
import sys
import argparse
from datetime import datetime, timedelta

# Adicionar raiz do projeto ao path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone (SQLite, snapshots síncronos)."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')
    os.environ.pop('DATABASE_URL', None)
    os.environ['SNAPSHOT_WRITE_MODE'] = 'sync'

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_sample_data():
    """Cria dados de exemplo através dos casos de uso."""
    from src.config.container import get_container, reset_container
    from src.core.tickets.dtos import ConvertTicketInputDTO, CreateTicketInputDTO
    from src.core.work_orders.dtos import CreateWorkOrderInputDTO

    container = get_container()
    store = container.store()

    print(f"📄 Templates disponíveis: {store.templates.count()}")

    print("📝 Criando ordens de trabalho de exemplo...")
    create_order = container.create_work_order_service()
    sample_orders = [
        CreateWorkOrderInputDTO(
            client_name='Clínica San Rafael',
            created_by='1',
            client_contact='3001234567',
            client_address='Calle 45 # 12-30',
            description='Mantenimiento preventivo de 12 equipos',
            service_type='Mantenimiento',
            priority='medium',
            status='assigned',
            assigned_technicians=('3',),
            assigned_formats=('orden-trabajo', 'mantenimiento-pc-multiequipo'),
            supervisor_id='2',
            scheduled_date=datetime.now() + timedelta(days=2),
        ),
        CreateWorkOrderInputDTO(
            client_name='Ferretería El Tornillo',
            created_by='2',
            client_address='Carrera 7 # 80-15',
            description='Diagnóstico de red intermitente',
            service_type='Soporte Técnico',
            priority='high',
            assigned_formats=('visita-tecnica-diagnostico',),
        ),
    ]
    for dto in sample_orders:
        order = create_order.execute(dto)
        print(f"   ✓ {order.number} - {order.client_name}")

    print("🎫 Criando tickets de exemplo...")
    create_ticket = container.create_ticket_service()
    first = create_ticket.execute(CreateTicketInputDTO(
        client_name='Laura Gómez',
        client_email='laura@example.com',
        client_phone='3109876543',
        client_company='Estudio Contable Gómez',
        subject='Instalación de impresora en red',
        description='Necesitamos instalar una impresora nueva para tres equipos.',
        category='installation',
        priority='medium',
    ))
    print(f"   ✓ {first.ticket_number}")

    second = create_ticket.execute(CreateTicketInputDTO(
        client_name='Pedro Ruiz',
        client_email='pedro@example.com',
        subject='Equipo no enciende',
        description='El computador de recepción no enciende desde ayer.',
        category='hardware',
        priority='urgent',
    ))
    print(f"   ✓ {second.ticket_number}")

    converted = container.convert_ticket_service().execute(ConvertTicketInputDTO(
        ticket_id=first.ticket.id,
        assigned_technicians=('3',),
    ))
    print(f"   ✓ {first.ticket_number} convertido em {converted.work_order.number}")

    print(f"🔔 Notificações geradas: {store.notifications.count()}")

    reset_container()
    print("✅ Dados de exemplo criados!")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Snapshots: {settings.SNAPSHOT_WRITE_MODE}")
    print(f"  Eventos: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. celery -A src.config.celery worker -l INFO")
    print("   2. pytest")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar dados de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 FieldOps - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está acessível.")
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
