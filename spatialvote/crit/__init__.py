'''Criteria of voting method quality in the preference plane.'''
