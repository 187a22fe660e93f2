"""Vaccine Scheduler command shell.

Reads one command per line from standard input and prints one outcome per
command. A single session is held for the life of the process.

Commands:
  create_patient <username> <password>
  create_caregiver <username> <password>
  login_patient <username> <password>
  login_caregiver <username> <password>
  search_caregiver_schedule <date>
  reserve <date> <vaccine>
  upload_availability <date>
  cancel <appointment_id>
  add_doses <vaccine> <number>
  show_appointments
  logout
  quit
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, TextIO

from sqlalchemy.orm import sessionmaker

from .core import database
from .core.exceptions import InvalidInput, SchedulerError
from .core.security import UserRole
from .core.session import SessionState
from .services.appointment_service import AppointmentService
from .services.auth_service import AuthService
from .services.availability_service import AvailabilityService
from .services.inventory_service import InventoryService
from .services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

BANNER = """
Welcome to the COVID-19 Vaccine Reservation Scheduling Application!
*** Please enter one of the following commands ***
> create_patient <username> <password>
> create_caregiver <username> <password>
> login_patient <username> <password>
> login_caregiver <username> <password>
> search_caregiver_schedule <date>
> reserve <date> <vaccine>
> upload_availability <date>
> cancel <appointment_id>
> add_doses <vaccine> <number>
> show_appointments
> logout
> quit
"""

class CommandShell:
    def __init__(self, session_factory: sessionmaker = None, out: TextIO = None):
        self.session_factory = session_factory or database.SessionLocal
        self.out = out or sys.stdout
        self.session = SessionState()
        self.commands: Dict[str, Callable[[List[str]], None]] = {
            "create_patient": self.create_patient,
            "create_caregiver": self.create_caregiver,
            "login_patient": self.login_patient,
            "login_caregiver": self.login_caregiver,
            "search_caregiver_schedule": self.search_caregiver_schedule,
            "reserve": self.reserve,
            "upload_availability": self.upload_availability,
            "cancel": self.cancel,
            "add_doses": self.add_doses,
            "show_appointments": self.show_appointments,
            "logout": self.logout,
        }

    def say(self, message: str) -> None:
        print(message, file=self.out)

    def run(self, stream: TextIO = None) -> None:
        """Prompt and execute commands until ``quit`` or end of input."""
        stream = stream or sys.stdin
        self.say(BANNER)
        while True:
            self.out.write("> ")
            self.out.flush()
            line = stream.readline()
            if not line:
                break
            if not self.execute(line):
                break

    def execute(self, line: str) -> bool:
        """Run one command line; returns False once the shell should exit."""
        tokens = line.split()
        if not tokens:
            return True

        operation, args = tokens[0], tokens[1:]
        if operation == "quit":
            self.say("Bye!")
            return False

        handler = self.commands.get(operation)
        if handler is None:
            self.say("Invalid operation name!")
            return True

        try:
            handler(args)
        except SchedulerError as e:
            self.say(e.detail)
        except Exception:
            logger.exception(f"Unexpected error while running {operation}")
            self.say("Please try again!")
        return True

    @staticmethod
    def _expect(args: List[str], count: int) -> None:
        if len(args) != count:
            raise InvalidInput("Please try again!")

    def _with_db(self, action: Callable):
        db = self.session_factory()
        try:
            return action(db)
        finally:
            db.close()

    # Accounts
    def _create(self, role: UserRole, args: List[str]) -> None:
        self._expect(args, 2)
        username, password = args
        self._with_db(lambda db: AuthService(db).register(role, username, password))
        self.say(f"Created user {username}")

    def create_patient(self, args: List[str]) -> None:
        self._create(UserRole.PATIENT, args)

    def create_caregiver(self, args: List[str]) -> None:
        self._create(UserRole.CAREGIVER, args)

    def _login(self, role: UserRole, args: List[str]) -> None:
        self.session.ensure_anonymous()
        self._expect(args, 2)
        username, password = args
        self._with_db(lambda db: AuthService(db).login(self.session, role, username, password))
        self.say(f"{role.value.capitalize()} logged in as: {username}")

    def login_patient(self, args: List[str]) -> None:
        self._login(UserRole.PATIENT, args)

    def login_caregiver(self, args: List[str]) -> None:
        self._login(UserRole.CAREGIVER, args)

    def logout(self, args: List[str]) -> None:
        self._expect(args, 0)
        self._with_db(lambda db: AuthService(db).logout(self.session))
        self.say("You have been logged out")

    # Scheduling
    def search_caregiver_schedule(self, args: List[str]) -> None:
        self.session.require_authenticated()
        self._expect(args, 1)
        schedule = self._with_db(
            lambda db: AvailabilityService(db).search_schedule(self.session, args[0])
        )
        if schedule.caregivers:
            self.say("The available caregivers are:")
            for caregiver in schedule.caregivers:
                self.say(caregiver)
        else:
            self.say(f"No caregivers are available on {schedule.date}.")
        for vaccine in schedule.vaccines:
            self.say(f"There are {vaccine.doses} doses of the {vaccine.name} vaccine available!")
        self.say("Caregiver Schedule Displayed!")

    def reserve(self, args: List[str]) -> None:
        self.session.require_patient()
        self._expect(args, 2)
        date_value, vaccine = args
        reservation = self._with_db(
            lambda db: ReservationService(db).reserve(self.session, date_value, vaccine)
        )
        self.say(f"Reservation {reservation.appointment_id} made with {reservation.caregiver}!")

    def upload_availability(self, args: List[str]) -> None:
        self.session.require_caregiver()
        self._expect(args, 1)
        self._with_db(lambda db: AvailabilityService(db).upload_availability(self.session, args[0]))
        self.say("Availability uploaded!")

    def cancel(self, args: List[str]) -> None:
        self.say("Cancelling appointments is not supported yet.")

    def add_doses(self, args: List[str]) -> None:
        self.session.require_caregiver()
        self._expect(args, 2)
        name, count = args
        self._with_db(lambda db: InventoryService(db).add_doses(self.session, name, count))
        self.say("Doses updated!")

    def show_appointments(self, args: List[str]) -> None:
        self.session.require_authenticated()
        self._expect(args, 0)
        appointments = self._with_db(lambda db: AppointmentService(db).show_appointments(self.session))
        if not appointments:
            self.say("No appointments scheduled.")
        for a in appointments:
            if self.session.is_caregiver:
                self.say(
                    f"{a.counterpart} is scheduled on {a.date} to receive a {a.vaccine} "
                    f"vaccine as per Appointment #{a.id}."
                )
            else:
                self.say(
                    f"You are scheduled on {a.date} to receive a {a.vaccine} "
                    f"vaccine as per Appointment #{a.id} from {a.counterpart}."
                )

def main(argv: List[str] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vaccine-scheduler",
        description="Interactive vaccine reservation scheduler",
    )
    parser.add_argument("--database-url", default=None, help="SQLAlchemy database URL")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args(argv)

    # Logs go to stderr so they do not interleave with command output
    logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr)

    if args.database_url:
        database.configure_database(args.database_url)
    try:
        database.init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return 1

    CommandShell().run()
    return 0

if __name__ == "__main__":
    sys.exit(main())
