app_name = "salon_agenda"
app_title = "Salon Agenda"
app_publisher = "Sebastian Ortiz Valencia"
app_description = "Agenda de salón: disponibilidad de horarios, solicitudes de citas y bloqueos"
app_email = "sebastianortiz989@gmail.com"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Includes in <head>
# ------------------

# include js, css files in header of desk.html
# app_include_js = "/assets/salon_agenda/js/salon_agenda.js"

# Document Events
# ---------------
# Hook on document methods and events

doc_events = {
	"Salon Appointment": {
		"on_update": "salon_agenda.salon_agenda.store.frappe_store.publish_change",
		"after_delete": "salon_agenda.salon_agenda.store.frappe_store.publish_change"
	},
	"Salon Procedure": {
		"on_update": "salon_agenda.salon_agenda.store.frappe_store.publish_change",
		"after_delete": "salon_agenda.salon_agenda.store.frappe_store.publish_change"
	},
	"Salon Blockage": {
		"on_update": "salon_agenda.salon_agenda.store.frappe_store.publish_change",
		"after_delete": "salon_agenda.salon_agenda.store.frappe_store.publish_change"
	}
}

# Testing
# -------

# before_tests = "salon_agenda.install.before_tests"

