"""
Scheduling Services

Core availability and booking logic for the salon agenda:
- interval: aritmética de intervalos semiabiertos
- blockages: resolución de bloqueos puntuales y semanales
- slots: generación de horarios disponibles
- layout: columnas de la agenda diaria
- mutations: cambios validados de citas y bloqueos
- availability: lecturas del almacenamiento + cálculo
- catalog: consultas del catálogo de servicios
"""
