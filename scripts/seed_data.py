"""
Seed script for the ShiftRoster development database.

- 1 admin, 7 staff covering every schedulable role
- availability for the current week (lunch + dinner, a few gaps)
- one approved absence so generation shows an exclusion
- staffing limits for every day and start-time targets for the kitchen

Run with: python -m scripts.seed_data
"""

import sys
from datetime import date, time, timedelta
from shiftroster.db.database import Base, SessionLocal, engine
from shiftroster.core.security import get_password_hash
from shiftroster.db.models import (
    AvailabilityEntries,
    Employees,
    Role,
    ShiftType,
    StaffingLimits,
    StartTimeTargets,
    TimeOffKind,
    TimeOffPeriods,
    TimeOffStatus,
    Users,
)


def reset_tables():
    """Drop and recreate every table."""
    print("Resetting tables...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("All tables recreated.")


def get_current_week_monday():
    """Get the Monday of the current week."""
    today = date.today()
    return today - timedelta(days=today.weekday())


# (username, name, primary, secondary, max_shifts_per_week)
STAFF = [
    ("admin", "Admin", Role.ADMIN, None, None),
    ("marco", "Marco", Role.PIZZA_MAKER, Role.COOK, 10),
    ("giulia", "Giulia", Role.PIZZA_MAKER, None, 8),
    ("luca", "Luca", Role.COOK, None, 10),
    ("sara", "Sara", Role.DELIVERY, Role.FLOOR, 8),
    ("paolo", "Paolo", Role.DELIVERY, None, 6),
    ("anna", "Anna", Role.FLOOR, Role.CASHIER, 10),
    ("elena", "Elena", Role.CASHIER, Role.FLOOR, 6),
]


def seed_staff(db) -> dict[str, Employees]:
    """Seed a login and an employee record per staff member."""
    print("Seeding users and employees...")

    employees = {}
    for username, name, primary, secondary, cap in STAFF:
        user = Users(username=username, password_hash=get_password_hash(f"{username}123"), is_active=True)
        db.add(user)
        db.flush()
        emp = Employees(
            user_id=user.id,
            name=name,
            primary_role=primary,
            secondary_role=secondary,
            is_active=True,
            max_shifts_per_week=cap,
        )
        db.add(emp)
        db.flush()
        employees[username] = emp

    db.commit()
    print(f"Created {len(employees)} employees.")
    return employees


def seed_availability(db, employees: dict[str, Employees], week_start: date):
    """Everyone available for every service, except days off listed below."""
    print("Seeding availability...")

    days_off = {
        "marco": {0},
        "giulia": {2, 3},
        "luca": {6},
        "sara": {1},
        "paolo": {4, 5},
        "anna": {0, 1},
        "elena": {3},
    }

    count = 0
    for username, emp in employees.items():
        if username == "admin":
            continue
        for day in range(7):
            for shift_type in ShiftType:
                db.add(AvailabilityEntries(
                    employee_id=emp.id,
                    week_start=week_start,
                    day_of_week=day,
                    shift_type=shift_type,
                    is_available=day not in days_off.get(username, set()),
                ))
                count += 1

    db.commit()
    print(f"Created {count} availability entries.")


def seed_time_off(db, employees: dict[str, Employees], week_start: date):
    print("Seeding time off...")
    db.add(TimeOffPeriods(
        employee_id=employees["luca"].id,
        kind=TimeOffKind.ABSENCE,
        start_date=week_start + timedelta(days=2),
        end_date=week_start + timedelta(days=3),
        status=TimeOffStatus.APPROVED,
        comments="Medical appointment",
        last_modified_by_employee_id=employees["admin"].id,
    ))
    db.commit()


def seed_staffing_limits(db):
    """Lunch is lighter than dinner; weekend dinners need an extra pizza maker."""
    print("Seeding staffing limits...")

    lunch = {Role.PIZZA_MAKER: (1, 1), Role.COOK: (1, 1), Role.FLOOR: (1, 2), Role.CASHIER: (1, 1)}
    dinner = {
        Role.PIZZA_MAKER: (1, 2),
        Role.COOK: (1, 1),
        Role.DELIVERY: (1, 2),
        Role.FLOOR: (1, 2),
        Role.CASHIER: (1, 1),
    }

    count = 0
    for day in range(7):
        for shift_type, limits in ((ShiftType.LUNCH, lunch), (ShiftType.DINNER, dinner)):
            for role, (min_staff, max_staff) in limits.items():
                if shift_type == ShiftType.DINNER and role == Role.PIZZA_MAKER and day >= 4:
                    min_staff = 2
                db.add(StaffingLimits(
                    day_of_week=day,
                    shift_type=shift_type,
                    role=role,
                    min_staff=min_staff,
                    max_staff=max_staff,
                ))
                count += 1

    db.commit()
    print(f"Created {count} staffing limits.")


def seed_start_time_targets(db):
    print("Seeding start-time targets...")
    targets = [
        StartTimeTargets(shift_type=ShiftType.DINNER, role=Role.PIZZA_MAKER, start_time=time(17, 30), target_count=1, priority=0),
        StartTimeTargets(shift_type=ShiftType.DINNER, role=Role.PIZZA_MAKER, start_time=time(18, 30), target_count=1, priority=1),
        StartTimeTargets(shift_type=ShiftType.DINNER, role=Role.DELIVERY, start_time=time(18, 30), target_count=2, priority=0),
        StartTimeTargets(shift_type=ShiftType.LUNCH, role=Role.COOK, start_time=time(11, 0), target_count=1, priority=0),
    ]
    db.add_all(targets)
    db.commit()


def main():
    """Main seed function."""
    print("\n" + "="*50)
    print("ShiftRoster Database Seeder")
    print("="*50 + "\n")

    response = input("This will DELETE ALL EXISTING DATA. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Aborted.")
        sys.exit(0)

    reset_tables()
    db = SessionLocal()

    try:
        week_start = get_current_week_monday()
        employees = seed_staff(db)
        seed_availability(db, employees, week_start)
        seed_time_off(db, employees, week_start)
        seed_staffing_limits(db)
        seed_start_time_targets(db)

        print("\n" + "="*50)
        print("Seeding complete!")
        print("="*50)
        print(f"\nAvailability seeded for week starting {week_start}")
        print("\nTest accounts (password = username + '123'):")
        print("  Admin:    admin / admin123")
        print("  Staff:    marco, giulia, luca, sara, paolo, anna, elena")
        print("="*50 + "\n")

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
