# labs/management/commands/seed_labs.py
"""
Management command to load demonstration data.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import random

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from labs.models import Equipment, Laboratory, Schedule, UserProfile

USERS = [
    # username, email, role, full name, department, biometric id, password
    ('admin', 'admin@dhvsu.edu.ph', 'admin', 'Dr. Maria Santos', 'IT Department', 'BIO000', 'admin123'),
    ('jdelacruz', 'juan.delacruz@dhvsu.edu.ph', 'admin', 'Juan Dela Cruz', 'IT Department', 'BIO010', 'admin123'),
    ('rocampo', 'prof.ocampo@dhvsu.edu.ph', 'faculty', 'Prof. Ramonsito Ocampo', 'College of Computing Studies', 'BIO001', 'faculty123'),
    ('agarcia', 'anna.garcia@dhvsu.edu.ph', 'faculty', 'Prof. Anna Garcia', 'College of Computing Studies', 'BIO002', 'faculty123'),
    ('mreyes', 'michael.reyes@dhvsu.edu.ph', 'faculty', 'Prof. Michael Reyes', 'College of Engineering', 'BIO003', 'faculty123'),
    ('lsantos', 'lisa.santos@dhvsu.edu.ph', 'faculty', 'Prof. Lisa Santos', 'College of Computing Studies', 'BIO004', 'faculty123'),
    ('rtan', 'robert.tan@dhvsu.edu.ph', 'faculty', 'Prof. Robert Tan', 'College of Computing Studies', 'BIO011', 'faculty123'),
    ('labkeeper', 'roberto.cruz@dhvsu.edu.ph', 'custodian', 'Roberto Cruz', 'Facilities Management', 'BIO005', 'custodian123'),
    ('jmanalo', 'jose.manalo@dhvsu.edu.ph', 'custodian', 'Jose Manalo', 'Facilities Management', 'BIO006', 'custodian123'),
    ('psantos', 'pedro.santos@dhvsu.edu.ph', 'custodian', 'Pedro Santos', 'Facilities Management', 'BIO012', 'custodian123'),
]

LABORATORIES = [
    # name, building, room, capacity, status, description
    ('Computer Laboratory 1', 'Engineering Building', 'E301', 40, 'active',
     'Main programming laboratory with 40 high-spec workstations for software development courses'),
    ('Computer Laboratory 2', 'Engineering Building', 'E302', 35, 'active',
     'Web development and database management laboratory'),
    ('Networking Laboratory', 'Engineering Building', 'E303', 30, 'active',
     'Cisco networking equipment and network simulation lab'),
    ('Multimedia Laboratory', 'Engineering Building', 'E304', 25, 'active',
     'Graphics design and multimedia production laboratory with high-end workstations'),
    ('Research Laboratory', 'Research Center', 'RC201', 20, 'active',
     'Graduate research and AI/ML development laboratory'),
    ('Mobile Development Lab', 'Engineering Building', 'E305', 30, 'maintenance',
     'Android and iOS mobile application development laboratory'),
    ('Cybersecurity Lab', 'Engineering Building', 'E306', 25, 'active',
     'Penetration testing and security analysis laboratory'),
    ('IoT Laboratory', 'Innovation Center', 'IC101', 20, 'active',
     'Internet of Things and embedded systems development lab'),
]

SCHEDULES = [
    # lab index, username, day of week, start, end, course, section, subject
    (0, 'rocampo', 1, '07:30', '09:00', 'CS121', 'BSCS 1A', 'Computer Programming 1'),
    (0, 'rocampo', 4, '07:30', '09:00', 'CS121', 'BSCS 1A', 'Computer Programming 1'),
    (0, 'agarcia', 1, '09:00', '12:00', 'CS122', 'BSCS 1B', 'Computer Programming 2'),
    (0, 'agarcia', 4, '09:00', '12:00', 'CS122', 'BSCS 1B', 'Computer Programming 2'),
    (1, 'mreyes', 2, '07:30', '10:30', 'IT211', 'BSIT 2A', 'Web Development'),
    (1, 'mreyes', 5, '07:30', '10:30', 'IT211', 'BSIT 2A', 'Web Development'),
    (2, 'lsantos', 2, '13:00', '16:00', 'IT301', 'BSIT 3A', 'Network Administration'),
    (2, 'lsantos', 5, '13:00', '16:00', 'IT301', 'BSIT 3A', 'Network Administration'),
    (3, 'rtan', 3, '08:00', '11:00', 'MM201', 'BSIT 2B', 'Multimedia Systems'),
]

BRANDS = {
    'monitor': (['Dell', 'ASUS', 'Samsung', 'LG', 'ViewSonic', 'BenQ'], ['P2419H', 'VG248QE', 'S24F350', '24MK430H', 'VA2719']),
    'keyboard': (['Logitech', 'A4Tech', 'Genius', 'Dell', 'HP'], ['K120', 'KR-6260', 'KB-110', 'KB216', 'K380']),
    'mouse': (['Logitech', 'A4Tech', 'Genius', 'Rapoo', 'HP'], ['B100', 'OP-620D', 'NetScroll 120', 'M185', 'M705']),
    'cpu': (['HP', 'Dell', 'Lenovo', 'ASUS', 'Acer'], ['ProDesk 400', 'OptiPlex 3080', 'ThinkCentre M720', 'VivoPC', 'Veriton']),
}
SERIAL_PREFIX = {'monitor': 'MON', 'keyboard': 'KB', 'mouse': 'MS', 'cpu': 'CPU'}


class Command(BaseCommand):
    help = 'Load demonstration users, laboratories, equipment and schedules'

    def add_arguments(self, parser):
        parser.add_argument(
            '--flush',
            action='store_true',
            help='Delete existing laboratories, schedules and non-superuser accounts first',
        )
        parser.add_argument(
            '--stations',
            type=int,
            default=8,
            help='Workstations to equip per laboratory (default: 8)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for reproducible equipment data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options['seed'])

        if options['flush']:
            Schedule.objects.all().delete()
            Laboratory.objects.all().delete()
            User.objects.filter(is_superuser=False).delete()
            self.stdout.write(self.style.WARNING('Existing data removed'))

        users = {}
        for username, email, role, full_name, department, biometric_id, password in USERS:
            user, created = User.objects.get_or_create(username=username, defaults={'email': email})
            if created:
                user.set_password(password)
                user.save()
            profile = user.userprofile
            profile.role = role
            profile.full_name = full_name
            profile.department = department
            profile.biometric_id = biometric_id
            profile.save()
            users[username] = user
        self.stdout.write(f'Users: {len(users)}')

        labs = []
        for name, building, room_number, capacity, status, description in LABORATORIES:
            lab, _ = Laboratory.objects.get_or_create(
                name=name,
                defaults={
                    'building': building,
                    'room_number': room_number,
                    'capacity': capacity,
                    'status': status,
                    'description': description,
                }
            )
            labs.append(lab)
        self.stdout.write(f'Laboratories: {len(labs)}')

        now = timezone.now()
        equipment_count = 0
        for lab_index, lab in enumerate(labs):
            if lab.status != 'active' or lab.equipment.exists():
                continue
            for station in range(1, options['stations'] + 1):
                row, col = (station - 1) // 8 + 1, (station - 1) % 8 + 1
                for equipment_type, (brands, models) in BRANDS.items():
                    Equipment.objects.create(
                        laboratory=lab,
                        equipment_type=equipment_type,
                        serial_number=f'{SERIAL_PREFIX[equipment_type]}-LAB{lab_index + 1}-{station:03d}',
                        brand=rng.choice(brands),
                        model=rng.choice(models),
                        status='present',
                        assigned_station=f'Station {station}',
                        position_x=col,
                        position_y=row,
                        last_detected=now,
                    )
                    equipment_count += 1
        self.stdout.write(f'Equipment created: {equipment_count}')

        schedule_count = 0
        for lab_index, username, day_of_week, start_time, end_time, course_code, section, subject in SCHEDULES:
            _, created = Schedule.objects.get_or_create(
                laboratory=labs[lab_index],
                user=users[username],
                day_of_week=day_of_week,
                start_time=start_time,
                defaults={
                    'end_time': end_time,
                    'course_code': course_code,
                    'section': section,
                    'subject': subject,
                    'is_recurring': True,
                }
            )
            schedule_count += int(created)
        self.stdout.write(f'Schedules created: {schedule_count}')

        self.stdout.write(self.style.SUCCESS('Demonstration data loaded'))
